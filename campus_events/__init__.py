"""University event management backend."""
