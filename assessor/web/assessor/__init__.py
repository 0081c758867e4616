"""Assessment platform REST API."""
