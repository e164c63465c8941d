"""HTTP endpoint exposing the local node supervisor."""
