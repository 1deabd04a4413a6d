"""Object storage: signed upload URLs and course images."""
