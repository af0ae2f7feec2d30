"""Core provisioning logic: settings, host handle, steps, stages and sequencer."""
