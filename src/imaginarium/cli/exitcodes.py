"""Process exit codes for the ``imaginarium`` CLI."""

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_UNSATISFIABLE = 2
