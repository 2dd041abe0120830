from mvc.service.config import DEFAULT_SERVICE_CONFIG, build_service_config

__all__ = ["DEFAULT_SERVICE_CONFIG", "build_service_config"]
