import logging

# Логгер пакета
logger = logging.getLogger("webchain")
logger.setLevel(logging.DEBUG)

# Create handlers
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.DEBUG)

# Create formatters and add it to handlers
formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
console_handler.setFormatter(formatter)

# Add handlers to the logger
logger.addHandler(console_handler)

# Prevent propagation to root logger
logger.propagate = False

# Меньше шума от библиотек хоста
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)


def configure_level(level: str) -> None:
    """Применяет уровень логирования из настроек."""
    logger.setLevel(level.upper())
    console_handler.setLevel(level.upper())
