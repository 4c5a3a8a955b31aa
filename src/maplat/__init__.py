"""`maplat` - projections for historical map images, and marker clustering.

Subpackages:
- projection: Transform chains, TIN warp, named datums, projection registry
- source: Map descriptor → projection strategy → tile source
- viewport: View continuity across projection switches
- cluster: Point clustering, hull, spiderfy layout, interaction state
- vector: Features and the reproject/extent filter
- schemas: Configuration and map descriptor models
"""

__version__ = "0.1.0"
