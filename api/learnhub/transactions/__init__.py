"""Course purchase transactions and payment intents."""
