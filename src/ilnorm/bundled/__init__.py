"""ildasm.exe is dropped into this directory at packaging time."""
