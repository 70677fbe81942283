"""tag-propagator — push release image tags into a GitOps repository."""

__version__ = "0.1.0"
