"""
Demo dataset the stores start from when SEED_FIXTURES is enabled.

Records use the same field names as the API payloads; they are validated by
the stores exactly like client input.
"""

CLIENTS = [
    {
        "id": 1,
        "name": "Sarah Johnson",
        "email": "sarah@techcorp.com",
        "company": "TechCorp Inc",
        "status": "active",
        "notes": "Long-term client, prefers email contact",
        "created_at": "2024-01-15T10:00:00Z",
    },
    {
        "id": 2,
        "name": "Michael Chen",
        "email": "michael@startupxyz.io",
        "company": "StartupXYZ",
        "status": "active",
        "notes": "Fast-moving team, weekly check-ins",
        "created_at": "2024-02-20T14:30:00Z",
    },
    {
        "id": 3,
        "name": "Emily Davis",
        "email": "emily@digitalagency.com",
        "company": "Digital Agency",
        "status": "active",
        "notes": "",
        "created_at": "2024-03-10T09:15:00Z",
    },
    {
        "id": 4,
        "name": "James Wilson",
        "email": "james@fashionbrand.co",
        "company": "Fashion Brand",
        "status": "inactive",
        "notes": "Project paused until next season",
        "created_at": "2024-04-05T16:45:00Z",
    },
]

PROJECTS = [
    {
        "id": 1,
        "name": "Website Redesign",
        "description": "Complete overhaul of the corporate website",
        "client_id": 1,
        "status": "completed",
        "budget": 15000,
        "start_date": "2024-01-20",
        "end_date": "2024-04-30",
    },
    {
        "id": 2,
        "name": "Mobile App MVP",
        "description": "First release of the iOS and Android app",
        "client_id": 2,
        "status": "active",
        "budget": 25000,
        "start_date": "2024-03-01",
        "end_date": "2024-08-31",
    },
    {
        "id": 3,
        "name": "Brand Identity",
        "description": "Logo, palette and brand guidelines",
        "client_id": 3,
        "status": "active",
        "budget": 8000,
        "start_date": "2024-04-01",
        "end_date": "2024-06-15",
    },
    {
        "id": 4,
        "name": "E-commerce Storefront",
        "description": "Seasonal collection shop",
        "client_id": 4,
        "status": "on-hold",
        "budget": 12000,
        "start_date": "2024-05-01",
        "end_date": "2024-09-30",
    },
    {
        "id": 5,
        "name": "Analytics Dashboard",
        "description": "Internal KPI dashboard",
        "client_id": 1,
        "status": "planning",
        "budget": 9500,
        "start_date": "2024-07-01",
        "end_date": "2024-10-31",
    },
]

TASKS = [
    {
        "id": 1,
        "title": "Review wireframes",
        "priority": "high",
        "status": "done",
        "due_date": "2024-02-10",
        "project_id": 1,
        "time_tracking": {
            "total_time": 5400000,
            "active_timer": None,
            "time_logs": [
                {
                    "id": 1,
                    "start_time": "2024-02-05T09:00:00Z",
                    "end_time": "2024-02-05T10:30:00Z",
                    "duration": 5400000,
                    "date": "2024-02-05",
                },
            ],
        },
    },
    {
        "id": 2,
        "title": "Implement responsive layout",
        "priority": "medium",
        "status": "done",
        "due_date": "2024-03-15",
        "project_id": 1,
        "time_tracking": {
            "total_time": 10800000,
            "active_timer": None,
            "time_logs": [
                {
                    "id": 2,
                    "start_time": "2024-03-01T13:00:00Z",
                    "end_time": "2024-03-01T15:00:00Z",
                    "duration": 7200000,
                    "date": "2024-03-01",
                },
                {
                    "id": 3,
                    "start_time": "2024-03-02T10:00:00Z",
                    "end_time": "2024-03-02T11:00:00Z",
                    "duration": 3600000,
                    "date": "2024-03-02",
                },
            ],
        },
    },
    {
        "id": 3,
        "title": "Set up authentication screens",
        "priority": "high",
        "status": "in-progress",
        "due_date": "2024-05-20",
        "project_id": 2,
        "time_tracking": {
            "total_time": 2700000,
            "active_timer": None,
            "time_logs": [
                {
                    "id": 4,
                    "start_time": "2024-05-02T14:00:00Z",
                    "end_time": "2024-05-02T14:45:00Z",
                    "duration": 2700000,
                    "date": "2024-05-02",
                },
            ],
        },
    },
    {
        "id": 4,
        "title": "Push notification service",
        "priority": "medium",
        "status": "todo",
        "due_date": "2024-06-30",
        "project_id": 2,
        "time_tracking": None,
    },
    {
        "id": 5,
        "title": "Logo concepts",
        "priority": "high",
        "status": "review",
        "due_date": "2024-04-25",
        "project_id": 3,
        "time_tracking": "",
    },
    {
        "id": 6,
        "title": "Brand guidelines document",
        "priority": "low",
        "status": "todo",
        "due_date": "2024-06-10",
        "project_id": 3,
    },
    {
        "id": 7,
        "title": "Product catalogue import",
        "priority": "medium",
        "status": "todo",
        "due_date": None,
        "project_id": 4,
    },
]

INVOICES = [
    {
        "id": 1,
        "project_id": 1,
        "client_id": 1,
        "amount": 7500,
        "status": "paid",
        "due_date": "2024-03-01",
        "payment_date": "2024-02-27T12:00:00Z",
        "line_items": [
            {"description": "Discovery and wireframes", "amount": 3000},
            {"description": "Visual design", "amount": 4500},
        ],
    },
    {
        "id": 2,
        "project_id": 1,
        "client_id": 1,
        "amount": 7500,
        "status": "paid",
        "due_date": "2024-05-15",
        "payment_date": "2024-05-10T09:30:00Z",
        "line_items": [
            {"description": "Front-end development", "amount": 7500},
        ],
    },
    {
        "id": 3,
        "project_id": 2,
        "client_id": 2,
        "amount": 10000,
        "status": "sent",
        "due_date": "2024-06-01",
        "payment_date": None,
        "line_items": [
            {"description": "MVP milestone 1", "amount": 10000},
        ],
    },
    {
        "id": 4,
        "project_id": 3,
        "client_id": 3,
        "amount": 2400,
        "status": "draft",
        "due_date": "2024-06-20",
        "payment_date": None,
        "line_items": [
            {"description": "Logo concepts", "amount": 1600},
            {"description": "Revisions", "amount": 800},
        ],
    },
    {
        "id": 5,
        "project_id": 4,
        "client_id": 4,
        "amount": 3000,
        "status": "overdue",
        "due_date": "2024-05-31",
        "payment_date": None,
        "line_items": [
            {"description": "Storefront setup deposit", "amount": 3000},
        ],
    },
]
