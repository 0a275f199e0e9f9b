"""Dense matrix, layer and builder: the compute core shared by backprop and genetic search."""
