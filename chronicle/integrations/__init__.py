"""Storage integrations for chronicle."""
