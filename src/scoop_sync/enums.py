# SPDX-License-Identifier: MIT
"""Enums for the scoop-sync layer."""

from enum import Enum


class SyncPhase(str, Enum):
    """Primary state of the synchronization orchestrator."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


class FailureContract(str, Enum):
    """How a gateway operation treats a failed backend call."""

    SWALLOW = "swallow"  # log, return a safe default
    PROPAGATE = "propagate"  # log, re-raise to the caller


class BackendOperation(str, Enum):
    """Named backend operations. Values are the backend command names."""

    LIST_INSTALLED_APPS = "get_installed_apps"
    SEARCH_REMOTE = "search_apps"
    SEARCH_LOCAL = "search_local_packets"
    UPDATE_APP = "update_app"
    UPDATE_ALL_APPS = "update_all_apps"
    UPDATE_MANAGER = "update_scoop"
    GET_INSTALL_SIZES = "get_app_sizes"
    LIST_REPOSITORIES = "get_buckets"
    ADD_REPOSITORY = "add_bucket"
    REMOVE_REPOSITORY = "remove_bucket"
    INSTALL_APP = "install_app"
    UNINSTALL_APP = "uninstall_app"
    LIST_DEPENDENCIES = "check_dependencies"
    IS_APP_INSTALLED = "is_app_installed"
    CHECK_UPDATES_ASYNC = "check_updates_async"
    DISCOVER_APPS = "get_random_apps"
    GET_APP_DETAIL = "get_app_detail"
