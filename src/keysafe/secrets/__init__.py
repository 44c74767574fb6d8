"""Secret store core, host keychain backends, and status handling."""
