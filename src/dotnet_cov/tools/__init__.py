"""External tool collaborators: processes, packages, commands and viewer."""

from dotnet_cov.tools.commands import (
    build_convert_command,
    build_report_command,
    build_test_command,
    locate_tool_payload,
    resolve_package_tool,
    tool_launch_prefix,
)
from dotnet_cov.tools.packages import DotnetPackageManager, PackageManager, ensure_packages, parse_package_list
from dotnet_cov.tools.process import CommandRunner, ProcessRunner, RecordingRunner, ToolInvocation
from dotnet_cov.tools.viewer import ReportViewer, open_in_browser

__all__ = [
    "build_convert_command",
    "build_report_command",
    "build_test_command",
    "locate_tool_payload",
    "resolve_package_tool",
    "tool_launch_prefix",
    "DotnetPackageManager",
    "PackageManager",
    "ensure_packages",
    "parse_package_list",
    "CommandRunner",
    "ProcessRunner",
    "RecordingRunner",
    "ToolInvocation",
    "ReportViewer",
    "open_in_browser",
]
