from prometheus_client import CollectorRegistry

# Package-local registry so importing pgschema never touches the global one.
REGISTRY = CollectorRegistry(auto_describe=True)
