"""Infrastructure clients: Postgres, Valkey, email gateway, Vault."""
