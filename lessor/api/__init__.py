"""HTTP API for operating the dispatcher, health monitor, and human control."""
