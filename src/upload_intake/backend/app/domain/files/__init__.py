from upload_intake.backend.app.domain.files.interfaces import FileStorage, WritableHandle

__all__ = ['FileStorage', 'WritableHandle']
