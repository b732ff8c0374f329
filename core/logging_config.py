"""
Logging-Konfiguration für das Projekt.
"""
import logging
import sys
from contextlib import contextmanager

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Bibliotheken, deren DEBUG/INFO-Ausgaben die Gebäudelogs überdecken
NOISY_LOGGERS = ('urllib3', 'pyogrio', 'fiona', 'pyproj')

def setup_logging(level: int = logging.INFO) -> None:
    """Konfiguriert das Logging-System.

    Ist der Root-Logger schon eingerichtet (z.B. durch pytest), wird nur
    das Level gesetzt.

    Args:
        level: Logging-Level (default: INFO)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if root_logger.handlers:
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    root_logger.debug("🔧 Logging-System initialisiert")

@contextmanager
def LoggedOperation(operation_name: str, logger: logging.Logger = None):
    """Kontext-Manager für geloggte Operationen.

    Fehler werden geloggt und unverändert weitergereicht.

    Args:
        operation_name: Name der Operation
        logger: Optionaler Logger des aufrufenden Moduls
    """
    logger = logger or logging.getLogger(__name__)
    logger.info(f"🔄 Starte: {operation_name}")
    try:
        yield
    except Exception as e:
        logger.error(f"❌ Fehler bei {operation_name}: {str(e)}")
        raise
    finally:
        logger.info(f"✅ Beendet: {operation_name}")
