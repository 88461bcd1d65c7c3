"""Message catalogs keyed by the English source string."""

MESSAGES = {
    "ka": {
        "Scheduled {service_type} for {equipment}. Service due on {next_service_date}.":
            "დაგეგმილი {service_type}: {equipment}. მომსახურების ვადა: {next_service_date}.",
        "From invoice {number}": "ინვოისიდან {number}",
    },
}
