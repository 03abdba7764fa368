from .processor import BatchProcessor, try_analyze

__all__ = ['BatchProcessor', 'try_analyze']
