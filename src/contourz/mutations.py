"""GraphQL mutation documents.

pg_graphql names mutations ``insertInto<table>Collection``,
``update<table>Collection`` and ``deleteFrom<table>Collection``. Never send a
``user_id``: row level security fills it in.
"""
from __future__ import annotations

from typing import Any

CONTACT_FIELDS = """
        id
        name
        phone
        email
        designation
        company_name
        tags
        notes
        is_completed_profile
        created_at
"""

PROFILE_FIELDS = """
        id
        username
        display_name
        bio
        avatar_url
        is_public
        created_at
        is_complete
"""

# -- contacts ---------------------------------------------------------------

CREATE_CONTACT = f"""
mutation CreateContact(
  $name: String!
  $phone: String
  $email: String
  $designation: String
  $company_name: String
  $tags: JSON
  $notes: String
  $is_completed_profile: Boolean
) {{
  insertIntocontactsCollection(
    objects: [{{
      name: $name
      phone: $phone
      email: $email
      designation: $designation
      company_name: $company_name
      tags: $tags
      notes: $notes
      is_completed_profile: $is_completed_profile
    }}]
  ) {{
    records {{{CONTACT_FIELDS}    }}
  }}
}}
"""

CONTACT_COLUMNS = {
    "name": "String",
    "phone": "String",
    "email": "String",
    "designation": "String",
    "company_name": "String",
    "tags": "JSON",
    "notes": "String",
    "is_completed_profile": "Boolean",
}

DELETE_CONTACT = """
mutation DeleteContact($id: UUID!) {
  deleteFromcontactsCollection(filter: { id: { eq: $id } }) {
    affectedCount
  }
}
"""

# -- tasks ------------------------------------------------------------------

CREATE_TASK = """
mutation CreateTask(
  $contact_id: UUID!
  $title: String!
  $description: String
  $priority: String
  $status: String
  $due_date: Datetime
  $reminder_at: Datetime
) {
  insertIntotasksCollection(
    objects: [{
      contact_id: $contact_id
      title: $title
      description: $description
      priority: $priority
      status: $status
      due_date: $due_date
      reminder_at: $reminder_at
    }]
  ) {
    records {
      id
      contact_id
      title
      description
      status
      priority
      due_date
      created_at
    }
  }
}
"""

TASK_COLUMNS = {
    "title": "String",
    "description": "String",
    "priority": "String",
    "status": "String",
    "due_date": "Datetime",
    "reminder_at": "Datetime",
    "completed_at": "Datetime",
}

DELETE_TASK = """
mutation DeleteTask($id: UUID!) {
  deleteFromtasksCollection(filter: { id: { eq: $id } }) {
    affectedCount
  }
}
"""

# -- meetings ---------------------------------------------------------------

CREATE_MEETING = """
mutation CreateMeeting(
  $contact_id: UUID!
  $title: String!
  $meeting_type: String!
  $scheduled_start: Datetime!
  $scheduled_end: Datetime
  $location: String
  $notes: String
) {
  insertIntomeetingsCollection(
    objects: [{
      contact_id: $contact_id
      title: $title
      meeting_type: $meeting_type
      scheduled_start: $scheduled_start
      scheduled_end: $scheduled_end
      location: $location
      notes: $notes
      status: "scheduled"
    }]
  ) {
    records {
      id
      contact_id
      title
      meeting_type
      scheduled_start
      scheduled_end
      location
      notes
      status
      created_at
    }
  }
}
"""

MEETING_COLUMNS = {
    "title": "String",
    "meeting_type": "String",
    "scheduled_start": "Datetime",
    "scheduled_end": "Datetime",
    "location": "String",
    "status": "String",
    "outcome": "String",
    "notes": "String",
}

DELETE_MEETING = """
mutation DeleteMeeting($id: UUID!) {
  deleteFrommeetingsCollection(filter: { id: { eq: $id } }) {
    affectedCount
  }
}
"""

# -- transactions -----------------------------------------------------------

CREATE_TRANSACTION = """
mutation CreateTransaction(
  $contact_id: UUID!
  $amount: BigFloat!
  $currency: String!
  $category: String
  $status: String
  $transaction_date: Datetime
  $reference_id: String
  $notes: String
) {
  insertIntotransactionsCollection(
    objects: [{
      contact_id: $contact_id
      amount: $amount
      currency: $currency
      category: $category
      status: $status
      transaction_date: $transaction_date
      reference_id: $reference_id
      notes: $notes
    }]
  ) {
    records {
      id
      contact_id
      amount
      currency
      category
      status
      transaction_date
      reference_id
      notes
      created_at
    }
  }
}
"""

TRANSACTION_COLUMNS = {
    "amount": "BigFloat",
    "currency": "String",
    "category": "String",
    "status": "String",
    "transaction_date": "Datetime",
    "reference_id": "String",
    "notes": "String",
}

DELETE_TRANSACTION = """
mutation DeleteTransaction($id: UUID!) {
  deleteFromtransactionsCollection(filter: { id: { eq: $id } }) {
    affectedCount
  }
}
"""

# -- profiles and tags ------------------------------------------------------

CREATE_PROFILE = f"""
mutation CreateProfile($userId: UUID!, $username: String!, $displayName: String!) {{
  insertIntoprofilesCollection(objects: [{{
    id: $userId
    username: $username
    display_name: $displayName
    is_public: true
    is_complete: false
  }}]) {{
    records {{{PROFILE_FIELDS}    }}
  }}
}}
"""

PROFILE_COLUMNS = {
    "username": "String",
    "display_name": "String",
    "bio": "String",
    "avatar_url": "String",
    "is_public": "Boolean",
    "is_complete": "Boolean",
}

ATTACH_TAG_TO_PROFILE = """
mutation AttachTagToProfile($profileId: UUID!, $tagId: UUID!) {
  insertIntoprofile_tagsCollection(
    objects: [{
      profile_id: $profileId
      tag_id: $tagId
    }]
  ) {
    records {
      id
      profile_id
      tag_id
      tags {
        id
        name
        normalized_name
        tag_type
        usage_count
      }
    }
  }
}
"""

REMOVE_TAG_FROM_PROFILE = """
mutation RemoveTagFromProfile($id: UUID!) {
  deleteFromprofile_tagsCollection(filter: { id: { eq: $id } }) {
    affectedCount
  }
}
"""


def update_mutation(
    table: str,
    columns: dict[str, str],
    record_id: str,
    values: dict[str, Any],
    returning: str,
) -> tuple[str, dict[str, Any]]:
    """Build an ``update<table>Collection`` mutation touching only the given columns.

    Every value travels as a declared variable, so user input is never spliced
    into the document. Returns ``(document, variables)``.
    """
    unknown = set(values) - set(columns)
    if unknown:
        raise ValueError(f"Unknown {table} columns: {', '.join(sorted(unknown))}")
    if not values:
        raise ValueError(f"Nothing to update on {table}")

    names = [name for name in columns if name in values]
    declarations = "\n".join(f"  ${name}: {columns[name]}" for name in names)
    assignments = "\n".join(f"      {name}: ${name}" for name in names)
    document = f"""
mutation Update{table.title().replace("_", "")}(
  $id: UUID!
{declarations}
) {{
  update{table}Collection(
    filter: {{ id: {{ eq: $id }} }}
    set: {{
{assignments}
    }}
  ) {{
    affectedCount
    records {{{returning}    }}
  }}
}}
"""
    variables = {"id": record_id}
    variables.update((name, values[name]) for name in names)
    return document, variables
