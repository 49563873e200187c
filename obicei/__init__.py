"""obicei - habit reminder delivery pipeline."""
