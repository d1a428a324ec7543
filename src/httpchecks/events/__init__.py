# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Event generation for endpoint results."""

from .emitter import Emission, EventEmitter, build_event

__all__ = ["Emission", "EventEmitter", "build_event"]
