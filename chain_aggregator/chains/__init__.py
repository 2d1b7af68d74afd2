"""Chain families: a reducer module and a source class per family."""
