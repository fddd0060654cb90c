"""SDK core -- HTTP transport, task protocol and plugin composition."""
