import logging


def configure_logging(config: dict):
    log_cfg = config.get("logging", {}) or {}
    lvl = (log_cfg.get("level") or "INFO").upper()
    handlers = [logging.StreamHandler()]
    if log_cfg.get("file"):
        handlers.append(logging.FileHandler(log_cfg["file"]))
    logging.basicConfig(
        level=getattr(logging, lvl, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
