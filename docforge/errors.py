"""Failure kinds raised by the DocForge core."""


class DocForgeError(Exception):
    """Base class for all DocForge failures."""


class ProjectNotFoundError(DocForgeError):
    """No usable state record at the project root (absent or corrupt)."""

    def __init__(self, root=None):
        self.root = root
        super().__init__('No DocForge project found. Run "docforge init" to create one.')


class ProjectExistsError(DocForgeError):
    """A state record already exists where a new project was requested."""

    def __init__(self, root=None):
        self.root = root
        super().__init__("A DocForge project already exists in this directory.")


class StrictModeBlockedError(DocForgeError):
    """Strict mode refused to approve a document with missing required sections."""

    def __init__(self, document_type: str, errors: list[str]):
        self.document_type = document_type
        self.errors = errors
        super().__init__(
            f"Strict mode: cannot approve {document_type.upper()}.md with missing sections "
            f"({'; '.join(errors)}). Use --force to approve anyway."
        )


class ProviderNotConfiguredError(DocForgeError):
    """The selected generation provider has no credentials."""

    def __init__(self, provider_name: str, instructions: str):
        self.provider_name = provider_name
        self.instructions = instructions
        super().__init__(f'Provider "{provider_name}" is not configured.\n\n{instructions}')
