"""Course catalog: the Course aggregate with nested sections and chapters."""
