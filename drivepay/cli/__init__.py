"""drivepay command-line interface."""
