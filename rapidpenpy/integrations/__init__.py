"""Optional renderer backends; import the one you need explicitly."""
