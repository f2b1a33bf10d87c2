"""Recipe AI backend."""
