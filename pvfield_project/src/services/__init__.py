"""Services: persisted settings, segment storage and the module catalog."""
