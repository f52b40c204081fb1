"""Module specifier parsing, classification and resolution."""
