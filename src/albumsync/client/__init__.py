"""Client module - Remote album client, sync engine and CLI."""
