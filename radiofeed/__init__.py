"""Radio Browser catalog feeds: countries, categories, stations and playable streams."""
