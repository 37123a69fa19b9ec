"""Activity log: who changed which agency or member, and when."""
