"""capsweep: rate-limit aware bulk caption removal for api.video accounts."""

__version__ = "0.3.0"
