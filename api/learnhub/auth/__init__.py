"""Identity: session token verification and identity-provider profile updates."""
