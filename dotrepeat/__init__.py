"""dotrepeat, repeat the last edit, figured out after the fact."""
