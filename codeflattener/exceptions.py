class FlattenerError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(FlattenerError):
    # errors related to configuration.
    pass

class DiscoveryError(FlattenerError):
    # errors during file discovery (e.g. a missing scan root).
    pass

class GitError(FlattenerError):
    # errors from git commands.
    pass

class TemplateError(FlattenerError):
    # errors related to template rendering.
    pass

class OutputError(FlattenerError):
    # errors during output operations.
    pass
