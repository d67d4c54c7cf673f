"""Element handlers, one module per element kind, registered with @handler."""
