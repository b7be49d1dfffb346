import logging, os, json, sys, time
from opentelemetry import trace

# LogRecord attributes that are not user-supplied extra= fields
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created)),
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "logger": record.name,
            "thread": record.threadName,
        }
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            base["trace_id"] = format(span_context.trace_id, "032x")
            base["span_id"] = format(span_context.span_id, "016x")
        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in base:
                base[key] = value
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)

def init_logging(service: str):
    lvl = os.getenv("TRACECARRIER_LOG_LEVEL", "INFO").upper()
    json_mode = os.getenv("TRACECARRIER_JSON_LOG", "0").lower() in ("1", "true", "json")
    logging.root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    if json_mode:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(f"%(asctime)s %(levelname)s {service} %(name)s %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(lvl)
    logging.getLogger(__name__).info("logging initialized", extra={"json": json_mode})

__all__ = ["init_logging", "JsonLogFormatter"]
