"""User-facing response texts for chat commands."""

from __future__ import annotations

NOTIFIER_START_MSG = "Brace yourselves, notifications are coming from cluster '{cluster}'."
NOTIFIER_STOP_MSG = "Sure! I won't send you notifications from cluster '{cluster}' anymore."
NOTIFIER_STATUS_ON_MSG = "Notifications are on for cluster '{cluster}'"
NOTIFIER_STATUS_OFF_MSG = "Notifications are off for cluster '{cluster}'"
SHOW_CONFIG_MSG = "Showing config for cluster '{cluster}'\n\n{config}"
SHOW_CONFIG_ERROR_MSG = "Error in getting configuration!"

UNSUPPORTED_COMMAND_MSG = "Command not supported. Please run /kubeheraldhelp to see supported commands."
INCOMPLETE_COMMAND_MSG = (
    "You missed to pass options for the command. Please run /kubeheraldhelp to see command options."
)
KUBECTL_DISABLED_MSG = (
    "Sorry, the admin hasn't given me the permission to execute kubectl command on cluster '{cluster}'."
)
KUBECTL_OUTPUT_MSG = "Cluster: {cluster}\n{output}"

FILTER_NAME_MISSING_MSG = "You forgot to pass filter name. Please pass one of the following valid filters:\n\n{filters}"
FILTER_ENABLED_MSG = "I have enabled '{filter_id}' filter on '{cluster}' cluster."
FILTER_DISABLED_MSG = "Done. I won't run '{filter_id}' filter on '{cluster}' cluster."

PONG_MSG = "pong from cluster '{cluster}'\n\n{version}"
VERSION_MSG = "K8s {server_version}\nkubeherald version: {version}"
UNKNOWN_SERVER_VERSION = "Server Version: Unknown"
