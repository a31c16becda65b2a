"""Topic revision tracker backend: spaced-repetition scheduling over a spreadsheet."""
