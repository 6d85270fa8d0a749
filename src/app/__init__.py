"""EVACROUTE server: authoritative occupant/hazard state over WebSockets."""
