"""Step handlers, formatter engine and invoker adapters."""
