from prometheus_client import CollectorRegistry

# Private registry so importing the library never pollutes the default one.
REGISTRY = CollectorRegistry(auto_describe=True)
