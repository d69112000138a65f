"""Contains the solver model: fingerprints, module catalog, possibility space and the WFC driver."""
