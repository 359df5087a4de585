"""RPC boundary - command handlers, error mapping, bootstrap."""
