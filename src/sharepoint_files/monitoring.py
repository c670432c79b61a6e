# -*- coding: utf-8 -*-
"""
Rate limiting monitoring and statistics tracking for SharePoint REST calls.

This module provides classes for monitoring SharePoint throttling headers and
tracking chunked upload statistics.
"""

from .utils import is_debug_metadata_enabled


class RateLimitMonitor:
    """
    Monitor and track SharePoint Online rate limiting metrics.

    Analyzes response headers to detect and track throttling:
    - RateLimit-Limit: Resource units available in the current window
    - RateLimit-Remaining: Resource units left in the current window
    - RateLimit-Reset: Seconds until the window resets

    Headers only appear when >80% of limit consumed.
    """

    def __init__(self):
        """Initialize rate limit monitoring metrics"""
        self.metrics = {
            'total_requests': 0,
            'throttled_requests': 0,
            'max_usage_percentage': 0.0,
            'alerts_triggered': 0
        }
        self.throttle_threshold = 0.8  # Alert when >80% of limit

    def analyze_response_headers(self, response):
        """
        Analyze SharePoint response headers for rate limiting info.

        Args:
            response: requests.Response object from a REST call

        Returns:
            dict: Rate limiting information extracted from headers
        """
        self.metrics['total_requests'] += 1

        headers = response.headers
        limit = headers.get('RateLimit-Limit')
        remaining = headers.get('RateLimit-Remaining')
        reset = headers.get('RateLimit-Reset')

        usage = None
        if limit and remaining is not None:
            try:
                usage = 1.0 - (float(remaining) / float(limit))
            except (TypeError, ValueError, ZeroDivisionError):
                usage = None

        if usage is not None:
            self.metrics['max_usage_percentage'] = max(self.metrics['max_usage_percentage'], usage)
            if usage >= self.throttle_threshold:
                self.metrics['alerts_triggered'] += 1
                print(f"[ ] Rate limit warning: {usage:.1%} of limit used")
                if is_debug_metadata_enabled() and reset:
                    print(f"[=] Rate limit window resets in {reset}s")

        if response.status_code in (429, 503):
            self.metrics['throttled_requests'] += 1
            print(f"[!] THROTTLING DETECTED: HTTP {response.status_code}")

        return {
            'usage_percentage': usage,
            'reset_seconds': int(reset) if reset and str(reset).isdigit() else None,
            'is_throttled': response.status_code == 429
        }

    def get_metrics_summary(self):
        """
        Get comprehensive rate limiting metrics.

        Returns:
            dict: Summary of all rate limiting metrics
        """
        return {
            'total_requests': self.metrics['total_requests'],
            'throttled_requests': self.metrics['throttled_requests'],
            'throttle_rate': self.metrics['throttled_requests'] / max(self.metrics['total_requests'], 1),
            'max_usage_percentage': self.metrics['max_usage_percentage'],
            'alerts_triggered': self.metrics['alerts_triggered']
        }

    def should_slow_down(self):
        """
        Determine if requests should be slowed down proactively.

        Returns:
            bool: True if approaching rate limits (>90% utilization)
        """
        return self.metrics['max_usage_percentage'] >= 0.9


# Global rate limit monitor instance
rate_monitor = RateLimitMonitor()


class UploadStatistics:
    """Track chunked upload statistics"""

    def __init__(self):
        """Initialize upload statistics"""
        self.stats = {
            'uploads_completed': 0,
            'uploads_failed': 0,
            'sessions_cancelled': 0,
            'fragments_sent': 0,
            'bytes_uploaded': 0
        }

    def record_fragment(self, size):
        self.stats['fragments_sent'] += 1
        self.stats['bytes_uploaded'] += size

    def record_completed(self):
        self.stats['uploads_completed'] += 1

    def record_failed(self):
        self.stats['uploads_failed'] += 1

    def record_cancelled(self):
        self.stats['sessions_cancelled'] += 1

    def print_summary(self):
        """Print final summary report of upload statistics."""
        print(f"[STATS] Upload Statistics:")
        print(f"   - Uploads completed:        {self.stats['uploads_completed']:>6}")
        print(f"   - Uploads failed:           {self.stats['uploads_failed']:>6}")
        if self.stats['sessions_cancelled'] > 0:
            print(f"   - Sessions cancelled:       {self.stats['sessions_cancelled']:>6}")
        print(f"   - Fragments sent:           {self.stats['fragments_sent']:>6}")
        print(f"\n[DATA] Transfer Summary:")
        print(f"   - Data uploaded:   {format_bytes(self.stats['bytes_uploaded'])}")

        metrics = rate_monitor.get_metrics_summary()
        if metrics['throttled_requests'] > 0:
            print(f"\n[!] WARNING: {metrics['throttled_requests']} request(s) were throttled")
        elif metrics['max_usage_percentage'] >= 0.8:
            print(f"\n[ ] CAUTION: Approached throttling limits")


def format_bytes(bytes_value):
    """
    Convert bytes to human-readable format.

    Args:
        bytes_value (int): Number of bytes to format

    Returns:
        str: Human-readable string (e.g., "1.5 MB")
    """
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_value < 1024.0:
            return f"{bytes_value:.1f} {unit}"
        bytes_value /= 1024.0
    return f"{bytes_value:.1f} TB"


# Global upload statistics instance
upload_stats = UploadStatistics()
