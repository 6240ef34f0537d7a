"""File and directory names making up the on-disk project layout."""

MANIFEST_FILENAME = "opa.project"
REPOSITORY_MANIFEST_FILENAME = "repository.yaml"

DOT_OPA_DIR = ".opa"
DEPENDENCIES_DIR = "dependencies"
REPOSITORIES_DIR = "repositories"

DEFAULT_SOURCE_DIR = "src"
DEFAULT_BUILD_DIR = "build"
DEFAULT_BUNDLE_FILE = "bundle.tar.gz"

ROOT_PACKAGE = "data"
