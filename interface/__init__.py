"""Host surfaces for the engine: console game (cli) and REST API (api)."""
