"""Radio startup stress testing for Android devices."""
