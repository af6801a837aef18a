"""Store adapters behind the search core's repository ports."""
