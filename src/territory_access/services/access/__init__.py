"""Location filter compilation and the principal-scoped access gateway."""
