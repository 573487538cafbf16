HTTP_TIMEOUT = 60

DEFAULT_API_VERSION = 'auto'
DEFAULT_TAG = 'latest'
DEFAULT_DOCKERFILE = 'Dockerfile'
DEFAULT_REGISTRY = 'https://index.docker.io/v1/'

TAR_EXTENSIONS = ('.tar', '.tar.gz', '.tgz', '.tar.bz2', '.tar.xz')
REMOTE_CONTEXT_PREFIXES = ('http://', 'https://')
ARCHIVE_PREFIX = 'orchestriq-context-'
BACKUP_SUFFIX = '_backup'

COMPOSE_FILE_EXTENSIONS = ('.yml', '.yaml')
COMPOSE_FILE_PREFIX = 'docker-compose'

SECRETS_PATH = '/run/secrets'
