"""Qt controllers mediating between the map editor and the layout engine."""
