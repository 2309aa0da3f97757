"""Run .NET tests with code coverage and render HTML coverage reports."""
