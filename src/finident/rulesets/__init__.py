"""Built-in YAML rule packs, loaded through importlib.resources."""
