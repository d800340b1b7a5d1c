"""Schema explorer: tree model, navigation state and display."""
