"""
Boundary layer: lesson database, versioned chunk index and model providers.

Everything that performs I/O lives here; core and application code reach
storage and the Google Generative AI services only through these adapters.
"""
