"""Classification of host UI items and the governed item table."""
