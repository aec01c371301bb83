"""Interactive terminal front end: key decoding, state machine, main loop."""
