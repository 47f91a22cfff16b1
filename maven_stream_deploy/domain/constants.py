"""Constants shared across the deploy domain models."""

DEFAULT_PACKAGING = "jar"
SNAPSHOT_SUFFIX = "-SNAPSHOT"
CHUNK_SIZE = 65536

MISSING_REPOSITORIES = "Missing repositories configuration"
MISSING_REPOSITORY_FIELDS = 'Deploy required "id" and "url".'

# camelCase keys accepted from plugin-style configuration mappings
CONFIG_KEY_ALIASES = {
    "artifactId": "artifact_id",
    "groupId": "group_id",
    "generatePom": "generate_pom",
}
