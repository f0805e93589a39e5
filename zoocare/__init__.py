"""Animal care backend: animal registry, behavior log, care tasks and vet assignment."""
