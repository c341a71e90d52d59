"""Generate TypeScript message types and JSON-RPC client stubs from protobuf schemas."""
